from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from users.views import RegisterView, UserDetailView
from carpool.views import RideRequestViewSet, RideViewSet, RideWantedViewSet

router = DefaultRouter()
router.register(r'rides', RideViewSet, basename='ride')
router.register(r'ride-wanted', RideWantedViewSet, basename='ride-wanted')
router.register(r'ride-requests', RideRequestViewSet, basename='ride-request')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include(router.urls)),
    path('api/v1/auth/register/', RegisterView.as_view(), name='register'),
    path('api/v1/auth/me/', UserDetailView.as_view(), name='user-detail'),
]

from rest_framework import serializers
from .models import User


class PublicUserSerializer(serializers.ModelSerializer):
    """
    What other members see on ride cards and ride-wanted posts.
    No contact details here.
    """
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'display_name', 'avatar_url', 'is_verified_driver']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """
    The signed-in member's own profile.
    """
    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'email', 'phone_number', 'bio', 'avatar_url', 'is_verified_driver']
        read_only_fields = ['id', 'username', 'is_verified_driver']


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['username', 'password', 'email', 'first_name', 'last_name', 'phone_number']

    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['username'],
            password=validated_data['password'],
            email=validated_data.get('email', ''),
            first_name=validated_data.get('first_name', ''),
            last_name=validated_data.get('last_name', ''),
            phone_number=validated_data.get('phone_number'),
        )
        return user

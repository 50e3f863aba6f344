from django.contrib.auth.models import AbstractUser
from django.db import models
from phonenumber_field.modelfields import PhoneNumberField


class User(AbstractUser):
    """
    A marketplace member. Anyone can both post rides (driver) and look for
    them (passenger); there is no fixed role.
    """
    # Shared with the other party once a seat request is accepted
    phone_number = PhoneNumberField(blank=True, null=True, unique=True)

    bio = models.TextField(blank=True, max_length=500)
    avatar_url = models.URLField(blank=True, null=True)

    # Set after licence check; only verified drivers get the badge on ride cards
    is_verified_driver = models.BooleanField(default=False)

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    def __str__(self):
        return self.display_name

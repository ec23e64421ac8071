from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    # Password hashing and session handling stay with django.contrib.auth
    email = models.EmailField(unique=True)

    REQUIRED_FIELDS = ['email']

    def __str__(self):
        return self.username

from django.contrib import admin
from .models import Organisation

admin.site.register(Organisation)

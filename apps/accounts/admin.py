from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "role", "store", "must_change_password")
    list_filter = ("role", "store")
    search_fields = ("user__username", "user__email", "full_name")

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User, Profile


@admin.register(User)
class ArenaUserAdmin(UserAdmin):
    list_display = ("username", "email", "user_uid", "is_staff", "date_joined")
    search_fields = ("username", "email", "user_uid")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("username", "user", "points_balance", "total_games_played", "total_games_won", "vip_level", "updated_at")
    list_editable = ("vip_level",)
    search_fields = ("username", "user__email")
    readonly_fields = ("points_balance", "total_games_played", "total_games_won", "created_at", "updated_at")

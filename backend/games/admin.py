from django.contrib import admin
from .models import Game, GameParticipant

# Games change state only through games.services; the admin is for inspection.
GAME_FIELDS = (
    "id", "game_type", "status", "bet_amount", "created_by", "winner",
    "game_data", "version", "created_at", "updated_at", "completed_at",
)


class GameParticipantInline(admin.TabularInline):
    model = GameParticipant
    extra = 0
    can_delete = False
    readonly_fields = ("user", "player_number", "ticket_numbers", "joined_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    list_display = ("id", "game_type", "status", "bet_amount", "created_by", "winner", "version", "created_at")
    list_filter = ("game_type", "status")
    search_fields = ("id", "created_by__email", "created_by__username")
    readonly_fields = GAME_FIELDS
    inlines = [GameParticipantInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(GameParticipant)
class GameParticipantAdmin(admin.ModelAdmin):
    list_display = ("game", "user", "player_number", "joined_at")
    search_fields = ("user__email", "game__id")
    readonly_fields = ("game", "user", "player_number", "ticket_numbers", "joined_at")

    def has_add_permission(self, request):
        return False

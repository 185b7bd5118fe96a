from django.contrib import admin
from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "game", "amount", "transaction_type", "description", "created_at")
    list_filter = ("transaction_type",)
    search_fields = ("user__email", "user__username", "game__id")
    readonly_fields = ("user", "game", "amount", "transaction_type", "description", "created_at")

    def has_delete_permission(self, request, obj=None):
        return False

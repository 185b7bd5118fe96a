from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin-panel/', admin.site.urls),

    # Accounts / profiles
    path('api/accounts/', include('accounts.urls')),

    # Points ledger
    path('api/ledger/', include('ledger.urls')),

    # Lobby + games
    path('api/games/', include('games.urls')),
]

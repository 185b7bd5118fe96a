from django.urls import path
from . import views

urlpatterns = [
    path("", views.games, name="games"),
    path("<uuid:game_id>/", views.game_detail, name="game-detail"),
    path("<uuid:game_id>/join/", views.join, name="game-join"),
    path("<uuid:game_id>/move/", views.move, name="game-move"),
    path("<uuid:game_id>/tickets/", views.tickets, name="game-tickets"),
    path("<uuid:game_id>/draw/", views.draw, name="game-draw"),
    path("<uuid:game_id>/spin/", views.spin, name="game-spin"),
    path("<uuid:game_id>/cancel/", views.cancel, name="game-cancel"),
]

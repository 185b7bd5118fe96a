from django.urls import path
from . import views

urlpatterns = [
    path('register/', views.register_view, name='register'),
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('profile/', views.profile_view, name='profile'),
    path("csrf/", views.csrf, name='csrf'),

    path("update-profile/", views.update_profile, name='update-profile'),
    path("leaderboard/", views.leaderboard, name='leaderboard'),
]

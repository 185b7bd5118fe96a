from django.urls import path
from . import views

urlpatterns = [
    path("balance/", views.balance, name="ledger-balance"),
    path("transactions/", views.transactions, name="ledger-transactions"),
]

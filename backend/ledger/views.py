import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import Profile
from .models import Transaction
from .serializers import BalanceSerializer, TransactionSerializer


logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def balance(request):
    return Response(BalanceSerializer(Profile.objects.get(user=request.user)).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def transactions(request):
    qs = Transaction.objects.filter(user=request.user).select_related("game")

    tx_type = request.query_params.get("type")
    if tx_type:
        qs = qs.filter(transaction_type=tx_type)

    try:
        limit = min(int(request.query_params.get("limit", 50)), 200)
    except ValueError:
        return Response({"error": "Invalid limit"}, status=400)

    return Response(TransactionSerializer(qs[:limit], many=True).data)

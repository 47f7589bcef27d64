# sales/views/fee_preview.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from sales.serializers.order import FeePreviewQuerySerializer
from sales.services.fees import FeeScheduleConfig, compute_fee, compute_fee_rp


class FeePreviewView(APIView):
    """
    GET /api/sales/fee-preview/?total=25000

    Same calculator as settlement, so the checkout preview never diverges
    from the debited fee.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("total", float, required=True)],
        responses={200: dict},
    )
    def get(self, request):
        query = FeePreviewQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        total = query.validated_data["total"]

        schedule = FeeScheduleConfig.from_model()
        return Response(
            {
                "total": str(total),
                "fee_rp": str(compute_fee_rp(total, schedule)),
                "fee_tokens": str(compute_fee(total, schedule)),
                "token_value_rp": str(schedule.token_value_rp),
            }
        )

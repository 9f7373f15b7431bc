# core/views.py
"""
Sequence configuration. Counters are never set through the API; only
prefix and padding can change.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from .models import Sequence
from .sequences import configure_sequence
from .serializers import SequenceConfigureSerializer, SequenceSerializer


class SequenceListView(APIView):
    """GET /api/sequences/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sequences.configure")
        return Response(SequenceSerializer(Sequence.objects.all(), many=True).data)


class SequenceDetailView(APIView):
    """PATCH /api/sequences/<name>/ {"prefix"?, "padding"?}"""
    permission_classes = [IsAuthenticated]

    def patch(self, request, name):
        actor = resolve_actor(request)
        require(actor, "sequences.configure")

        serializer = SequenceConfigureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            seq = configure_sequence(name, **serializer.validated_data)
        except ValueError as e:
            return Response({"detail": str(e), "code": "validation"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SequenceSerializer(seq).data)

from django.urls import path

from .views import SequenceDetailView, SequenceListView

app_name = "core"

urlpatterns = [
    path("", SequenceListView.as_view(), name="sequence-list"),
    path("<slug:name>/", SequenceDetailView.as_view(), name="sequence-detail"),
]

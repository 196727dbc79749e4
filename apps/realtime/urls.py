from django.urls import path

from .views import PollView

urlpatterns = [
    path("realtime/poll/", PollView.as_view(), name="realtime-poll"),
]

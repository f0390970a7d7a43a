from django.urls import path
from . import views

app_name = "applications"

urlpatterns = [
    path("applications/submit/", views.submit_application, name="submit"),
    path("applications/", views.application_list, name="list"),
    path("applications/stats/", views.application_stats, name="stats"),
    path("applications/<int:pk>/", views.application_detail, name="detail"),
    path("applications/<int:pk>/status/", views.application_status, name="status"),
    path("set-password/<str:uidb64>/<str:token>/", views.set_password, name="set-password"),
]

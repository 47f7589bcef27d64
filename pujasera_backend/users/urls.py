# users/urls.py

from django.urls import path

from .views import MeView, PujaseraRegisterView, TenantRegisterView

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC REGISTRATION ----------------
    path("register/pujasera/", PujaseraRegisterView.as_view(), name="register-pujasera"),
    path("register/tenant/", TenantRegisterView.as_view(), name="register-tenant"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
]

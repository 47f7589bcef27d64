# users/serializers.py

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


# ---------------- REGISTRATION (HTTP INPUT) ----------------
class PujaseraRegisterSerializer(serializers.Serializer):
    pujaseraName = serializers.CharField(max_length=255)
    pujaseraLocation = serializers.CharField(max_length=255)
    adminName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    whatsapp = serializers.CharField(max_length=32)
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    referralCode = serializers.CharField(required=False, allow_blank=True, default="", max_length=64)


class TenantRegisterSerializer(serializers.Serializer):
    storeName = serializers.CharField(max_length=255)
    adminName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    whatsapp = serializers.CharField(max_length=32)
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    pujaseraGroupSlug = serializers.SlugField(max_length=120)


# ---------------- REGISTRATION (QUEUE PAYLOAD) ----------------
class PujaseraRegistrationPayloadSerializer(serializers.Serializer):
    """
    pujasera-registration job payload. Carries a password hash, never the
    raw password.
    """

    pujaseraName = serializers.CharField(max_length=255)
    pujaseraLocation = serializers.CharField(max_length=255)
    adminName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    whatsapp = serializers.CharField(max_length=32)
    passwordHash = serializers.CharField()
    referralCode = serializers.CharField(required=False, allow_blank=True, default="")


class TenantRegistrationPayloadSerializer(serializers.Serializer):
    storeName = serializers.CharField(max_length=255)
    adminName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    whatsapp = serializers.CharField(max_length=32)
    passwordHash = serializers.CharField()
    pujaseraGroupSlug = serializers.SlugField(max_length=120)


# ---------------- USER OUTPUT ----------------
class MeSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    store_id = serializers.SerializerMethodField()
    whatsapp = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "email", "display_name", "role", "store_id", "whatsapp"]

    def _profile(self, obj):
        return getattr(obj, "staff_profile", None)

    def get_store_id(self, obj):
        profile = self._profile(obj)
        return str(profile.store_id) if profile else None

    def get_whatsapp(self, obj):
        profile = self._profile(obj)
        return profile.whatsapp if profile else ""

# store/models/fee_schedule.py

from decimal import Decimal

from django.db import models


class FeeSchedule(models.Model):
    """
    Platform fee configuration (singleton row keyed "transactionFees").

    Read once per invocation via sales.services.fees.FeeScheduleConfig;
    nothing in the settlement path reads this table directly.
    """

    DEFAULT_KEY = "transactionFees"

    key = models.CharField(max_length=64, unique=True, default=DEFAULT_KEY)

    fee_percentage = models.DecimalField(max_digits=8, decimal_places=6, default=Decimal("0.005"))
    min_fee_rp = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("500"))
    max_fee_rp = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("2500"))
    token_value_rp = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("1000"))

    new_pujasera_bonus_tokens = models.DecimalField(max_digits=18, decimal_places=6, default=Decimal("0"))
    new_tenant_bonus_tokens = models.DecimalField(max_digits=18, decimal_places=6, default=Decimal("0"))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fee schedule"

    @classmethod
    def load(cls) -> "FeeSchedule":
        obj, _ = cls.objects.get_or_create(key=cls.DEFAULT_KEY)
        return obj

    def __str__(self):
        return f"{self.key} ({self.fee_percentage}, {self.min_fee_rp}-{self.max_fee_rp})"

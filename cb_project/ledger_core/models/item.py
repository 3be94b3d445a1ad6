from django.core.exceptions import ValidationError
from django.db import models

from ..constants import ITEM_TYPE_CHOICES
from .vendor import normalize_name


# ---------- Items (material or service labels) ----------
class Item(models.Model):

    name = models.CharField(max_length=200)
    normalized_name = models.CharField(max_length=200, unique=True, editable=False)
    # MATERIAL (cement, steel) or SERVICE (labour, transport)
    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES)
    unit = models.CharField(max_length=30)  # bag, kg, trip, day
    category = models.CharField(max_length=100, default="General", blank=True)
    description = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.unit})"

    def clean(self):
        self.normalized_name = normalize_name(self.name)
        if not self.normalized_name:
            raise ValidationError("Item name is required")
        clash = Item.objects.filter(normalized_name=self.normalized_name)
        if self.pk:
            clash = clash.exclude(pk=self.pk)
        if clash.exists():
            raise ValidationError("Item already exists (duplicate name)")

    def save(self, *args, **kwargs):
        self.normalized_name = normalize_name(self.name)
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

from django.core.exceptions import ValidationError
from django.db import models


def normalize_name(name):
    """Lowercase, trim and collapse inner whitespace ("  ACME  Steel" → "acme steel")."""
    return " ".join((name or "").split()).lower()


class Vendor(models.Model):  # Supplier or contractor that gets paid

    name = models.CharField(max_length=200)
    # Dedup key, recomputed from name on every save
    normalized_name = models.CharField(max_length=200, unique=True, editable=False)
    contact_details = models.CharField(max_length=255, null=True, blank=True)
    tax_id = models.CharField(max_length=50, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        self.normalized_name = normalize_name(self.name)
        if not self.normalized_name:
            raise ValidationError("Vendor name is required")
        # friendlier than the IntegrityError from the unique index
        clash = Vendor.objects.filter(normalized_name=self.normalized_name)
        if self.pk:
            clash = clash.exclude(pk=self.pk)
        if clash.exists():
            raise ValidationError("Vendor already exists (duplicate name)")

    def save(self, *args, **kwargs):
        self.normalized_name = normalize_name(self.name)
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

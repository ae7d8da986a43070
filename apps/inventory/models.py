from django.db import models


class InventoryItem(models.Model):
    """One line of a store's inventory report."""
    store = models.ForeignKey('stores.Store', on_delete=models.CASCADE, related_name='inventory_items')
    item_code = models.CharField(max_length=64)
    din_number = models.CharField(max_length=32, null=True, blank=True, db_index=True)
    upc = models.CharField(max_length=32, null=True, blank=True)
    manufacturer_code = models.CharField(max_length=32, blank=True)
    brand_name = models.CharField(max_length=200, null=True, blank=True)
    generic_name = models.CharField(max_length=200, null=True, blank=True)
    strength = models.CharField(max_length=64, null=True, blank=True)
    description = models.CharField(max_length=512)
    size = models.DecimalField(max_digits=12, decimal_places=3, default=0)
    unit_of_measure = models.CharField(max_length=16, blank=True)
    marketing_status = models.CharField(max_length=32, blank=True)
    order_control = models.CharField(max_length=32, blank=True)
    backroom_stock = models.IntegerField(default=0)
    on_hand = models.IntegerField(default=0)
    total_quantity = models.IntegerField(default=0)
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    days_aging = models.IntegerField(null=True, blank=True)
    report_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["description"]
        indexes = [
            models.Index(fields=["store", "description"], name="idx_inv_store_desc"),
            models.Index(fields=["days_aging"], name="idx_inv_days_aging"),
        ]

    def __str__(self) -> str:
        return f"{self.description} @ {self.store_id}"

# products/management/commands/seed_products.py

from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product


class Command(BaseCommand):
    help = "Seed a small demo catalog (idempotent)"

    PRODUCTS = [
        ("COF-LATTE", "Cafe Latte", "150.00"),
        ("COF-AMER", "Americano", "120.00"),
        ("PAS-CROIS", "Butter Croissant", "95.00"),
        ("PAS-ENSA", "Ensaymada", "65.00"),
        ("MEAL-ADOBO", "Chicken Adobo Rice Bowl", "210.00"),
    ]

    def handle(self, *args, **options):
        created_count = 0

        for sku, name, price in self.PRODUCTS:
            _, created = Product.objects.get_or_create(
                sku=sku,
                defaults={"name": name, "unit_price": Decimal(price)},
            )
            created_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(f"Catalog seeded ({created_count} new, {len(self.PRODUCTS)} total).")
        )

# orders/management/commands/sync_payment_links.py

from django.core.management.base import BaseCommand

from caching.apps import get_cache_gateway
from orders.services.order_payments import sync_pending_payment_links
from payments.services.paymongo import PayMongoClient


class Command(BaseCommand):
    help = "Pull PayMongo link status onto online orders still awaiting payment"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Check at most N orders")

    def handle(self, *args, **options):
        result = sync_pending_payment_links(
            cache=get_cache_gateway(),
            payment_provider=PayMongoClient.from_settings(),
            limit=options["limit"],
        )

        style = self.style.SUCCESS if not result["failed"] else self.style.WARNING
        self.stdout.write(
            style(
                f"Payment links checked: {result['checked']}, "
                f"updated: {result['updated']}, failed: {result['failed']}."
            )
        )

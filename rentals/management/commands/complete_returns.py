from django.core.management.base import BaseCommand
from django.utils import timezone

from rentals.models import Rental
from rentals.services import complete_returned_rentals
from rentals.statuses import RentalStatus


class Command(BaseCommand):
    help = 'ปิดงานการเช่าที่ร้านอนุมัติการคืนรถแล้ว (return_approved -> completed)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='แสดงรายการที่จะปิดงานโดยไม่บันทึก',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        self.stdout.write(f"--- เริ่มปิดงานการเช่าที่คืนรถแล้ว ({now:%d/%m/%Y %H:%M}) ---")

        rentals = Rental.objects.filter(rental_status=RentalStatus.RETURN_APPROVED).select_related('car')
        if not rentals.exists():
            self.stdout.write(self.style.WARNING("ไม่พบรายการที่รอปิดงาน"))
            return

        if options['dry_run']:
            for rental in rentals:
                self.stdout.write(f"  {rental.booking_ref} - {rental.car}")
            self.stdout.write(self.style.SUCCESS(f"--- (dry-run) พบ {rentals.count()} รายการ ---"))
            return

        completed, failed = complete_returned_rentals(now=now)
        for rental_id in failed:
            self.stdout.write(self.style.ERROR(f"❌ ปิดงาน rental #{rental_id} ไม่สำเร็จ"))

        self.stdout.write(self.style.SUCCESS(f"--- ปิดงานทั้งหมด {len(completed)} รายการ ---"))

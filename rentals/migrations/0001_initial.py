import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import rentals.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Shop',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150, verbose_name='ชื่อร้าน')),
                ('phone', models.CharField(blank=True, default='', max_length=20)),
                ('promptpay_id', models.CharField(blank=True, default='', max_length=20, verbose_name='พร้อมเพย์')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('owner', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='shop', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Car',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(max_length=50, verbose_name='ยี่ห้อ')),
                ('model', models.CharField(max_length=50, verbose_name='รุ่น')),
                ('year', models.PositiveIntegerField(blank=True, null=True, verbose_name='ปีจดทะเบียน')),
                ('license_plate', models.CharField(blank=True, default='', max_length=100)),
                ('car_type', models.CharField(choices=[('SEDAN', 'รถเก๋ง'), ('SUV', 'รถอเนกประสงค์'), ('TRUCK', 'รถกระบะ'), ('VAN', 'รถตู้'), ('EV', 'รถไฟฟ้า')], default='SEDAN', max_length=10)),
                ('description', models.TextField(blank=True, default='')),
                ('daily_rate', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('insurance_rate', models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('status', models.CharField(choices=[('available', 'ว่าง'), ('rented', 'ถูกเช่า'), ('maintenance', 'ซ่อมบำรุง')], default='available', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cars', to='rentals.shop')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Rental',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_ref', models.CharField(default=rentals.models.generate_booking_ref, editable=False, max_length=20, unique=True)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('pickup_location', models.CharField(blank=True, default='', max_length=255)),
                ('return_location', models.CharField(blank=True, default='', max_length=255)),
                ('daily_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('insurance_rate', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('rental_status', models.CharField(choices=[('pending', 'รออนุมัติ'), ('confirmed', 'อนุมัติแล้ว'), ('ongoing', 'กำลังเช่า'), ('return_requested', 'ขอคืนรถ'), ('return_approved', 'อนุมัติคืนรถแล้ว'), ('completed', 'เสร็จสิ้น'), ('cancelled', 'ยกเลิก')], default='pending', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'รอชำระเงิน'), ('pending_verification', 'รอยืนยันการชำระเงิน'), ('paid', 'ชำระเงินแล้ว'), ('refund_pending', 'รอการคืนเงิน'), ('refunded', 'คืนเงินแล้ว'), ('failed', 'ชำระเงินไม่สำเร็จ'), ('rejected', 'การชำระเงินถูกปฏิเสธ')], default='pending', max_length=30)),
                ('status_before_return', models.CharField(blank=True, default='', max_length=20)),
                ('has_review', models.BooleanField(default=False)),
                ('version', models.PositiveIntegerField(default=1)),
                ('refund_bank_name', models.CharField(blank=True, default='', max_length=100)),
                ('refund_account_no', models.CharField(blank=True, default='', max_length=30)),
                ('refund_account_name', models.CharField(blank=True, default='', max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('car', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rentals', to='rentals.car')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rentals', to=settings.AUTH_USER_MODEL)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rentals', to='rentals.shop')),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(('end_date__gt', models.F('start_date'))), name='rental_end_after_start')],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('method', models.CharField(default='promptpay', max_length=30)),
                ('proof_image', models.ImageField(upload_to='payment_proofs/')),
                ('status', models.CharField(choices=[('pending_verification', 'รอยืนยันการชำระเงิน'), ('paid', 'ชำระเงินแล้ว'), ('failed', 'ชำระเงินไม่สำเร็จ'), ('rejected', 'การชำระเงินถูกปฏิเสธ')], default='pending_verification', max_length=30)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('rental', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='rentals.rental')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stars', models.IntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('car', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='rentals.car')),
                ('rental', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='review', to='rentals.rental')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]

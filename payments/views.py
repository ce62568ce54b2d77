# payments/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from rentals import eligibility, services
from rentals.exceptions import RentalError
from rentals.models import Rental
from rentals.presentation import error_message

from .forms import PaymentProofForm
from .utils import generate_promptpay_payload

logger = logging.getLogger(__name__)


def promptpay_id_for(rental):
    return rental.shop.promptpay_id or getattr(settings, 'PROMPTPAY_DEFAULT_ID', '')


def build_payment_context(rental):
    promptpay_id = promptpay_id_for(rental)
    qr_payload = None
    if promptpay_id:
        try:
            qr_payload = generate_promptpay_payload(promptpay_id, rental.total_amount)
        except ValueError as e:
            # ร้านตั้งพร้อมเพย์ผิด ยังให้ลูกค้าดูหน้าได้ แค่ไม่มี QR
            logger.warning("shop %s has an invalid PromptPay id: %s", rental.shop_id, e)

    return {
        'rental': rental,
        'promptpay_id': promptpay_id,
        'qr_payload': qr_payload,
        'amount': rental.total_amount,
        'can_pay': eligibility.can_upload_payment_proof(rental),
        'payments': rental.payments.all(),
    }


# หน้าชำระเงิน (QR พร้อมเพย์ + อัปโหลดสลิป)
@login_required
def payment_page(request, rental_id):
    rental = get_object_or_404(Rental.objects.select_related('car', 'shop'), id=rental_id, customer=request.user)

    context = build_payment_context(rental)
    context['form'] = PaymentProofForm()
    return render(request, 'payments/payment.html', context)


@login_required
@require_POST
def upload_proof(request, rental_id):
    rental = get_object_or_404(Rental, id=rental_id, customer=request.user)

    form = PaymentProofForm(request.POST, request.FILES)
    if not form.is_valid():
        for error in form.errors.get('payment_proof', []):
            messages.error(request, error)
        return redirect('payment_page', rental_id=rental.id)

    try:
        services.upload_payment_proof(rental.id, form.cleaned_data['payment_proof'])
    except RentalError as e:
        messages.error(request, error_message(e))
        return redirect('payment_page', rental_id=rental.id)

    messages.success(request, "อัปโหลดหลักฐานการชำระเงินเรียบร้อย รอร้านตรวจสอบ")
    return redirect('booking_detail', rental_id=rental.id)

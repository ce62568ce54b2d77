# shop/views.py
import logging

from django.contrib import messages
from django.db.models import Q
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from rentals import lifecycle, services
from rentals.exceptions import RentalError
from rentals.models import Rental
from rentals.presentation import error_message
from rentals.statuses import Action, Actor, PaymentStatus, RentalStatus

from .decorators import shop_required
from .forms import CarForm, ShopProfileForm

logger = logging.getLogger(__name__)

# ปุ่มที่ร้านกดได้ (slug ใน URL -> action + ข้อความแจ้ง)
SHOP_ACTIONS = {
    'approve': (Action.APPROVE_BOOKING, "อนุมัติ", "อนุมัติการจอง {ref} แล้ว"),
    'reject': (Action.REJECT_BOOKING, "ปฏิเสธ", "ปฏิเสธการจอง {ref} แล้ว"),
    'verify-payment': (Action.VERIFY_PAYMENT, "ยืนยันยอดเงิน", "ยืนยันยอดเงิน {ref} เรียบร้อยแล้ว"),
    'reject-payment': (Action.REJECT_PAYMENT, "สลิปไม่ผ่าน", "ปฏิเสธสลิปของ {ref} แล้ว ลูกค้าต้องอัปโหลดใหม่"),
    'start': (Action.START_RENTAL, "ส่งมอบรถ", "บันทึกสถานะ: ลูกค้ารับรถไปแล้ว ({ref})"),
    'approve-return': (Action.APPROVE_RETURN, "อนุมัติคืนรถ", "อนุมัติการคืนรถ {ref} แล้ว รถพร้อมให้เช่าอีกครั้ง"),
    'reject-return': (Action.REJECT_RETURN, "ปฏิเสธการคืน", "ปฏิเสธคำขอคืนรถ {ref} แล้ว"),
    'complete': (Action.COMPLETE, "จบงาน", "บันทึกสถานะ: จบงาน {ref} เรียบร้อย"),
}

INBOX_TABS = {
    'pending': Q(rental_status=RentalStatus.PENDING) | Q(payment_status=PaymentStatus.PENDING_VERIFICATION),
    'returns': Q(rental_status=RentalStatus.RETURN_REQUESTED),
    'active': Q(rental_status__in=[RentalStatus.CONFIRMED, RentalStatus.ONGOING, RentalStatus.RETURN_APPROVED]),
}


@shop_required
def inbox(request):
    tab = request.GET.get('tab', 'pending')
    rentals = Rental.objects.filter(shop=request.shop).select_related('car', 'customer').prefetch_related('payments')

    counts = {name: rentals.filter(query).count() for name, query in INBOX_TABS.items()}
    if tab in INBOX_TABS:
        rentals = rentals.filter(INBOX_TABS[tab])

    rentals = list(rentals.order_by('-created_at'))
    # ปุ่มที่ร้านกดได้จริงในสถานะปัจจุบัน
    for rental in rentals:
        allowed = lifecycle.available_actions(lifecycle.RentalState.from_rental(rental), Actor.SHOP)
        rental.shop_buttons = [
            (slug, label) for slug, (action, label, _) in SHOP_ACTIONS.items() if action in allowed
        ]

    return render(request, 'shop/inbox.html', {
        'shop': request.shop,
        'rentals': rentals,
        'tab': tab,
        'counts': counts,
        'cars': request.shop.cars.all(),
    })


# ฟังก์ชันนี้รองรับการกดปุ่มทุกปุ่มของร้าน (อนุมัติ, ปฏิเสธ, ตรวจสลิป, รับรถ, คืนรถ, จบงาน)
@shop_required
@require_POST
def rental_action(request, rental_id, action):
    if action not in SHOP_ACTIONS:
        raise Http404("unknown action")
    rental = get_object_or_404(Rental, id=rental_id, shop=request.shop)
    lifecycle_action, _, success_message = SHOP_ACTIONS[action]

    try:
        services.perform_action(rental.id, lifecycle_action, Actor.SHOP)
    except RentalError as e:
        messages.error(request, error_message(e))
    else:
        messages.success(request, success_message.format(ref=rental.booking_ref))

    return redirect('shop_inbox')


# หน้ารายการรอคืนเงิน
@shop_required
def refund_dashboard(request):
    refunds = Rental.objects.filter(
        shop=request.shop,
        payment_status=PaymentStatus.REFUND_PENDING,
    ).select_related('car', 'customer').order_by('created_at')
    return render(request, 'shop/refund_dashboard.html', {'refunds': refunds})


# ฟังก์ชันกด "ยืนยันการคืนเงิน"
@shop_required
@require_POST
def settle_refund(request, rental_id):
    rental = get_object_or_404(Rental, id=rental_id, shop=request.shop)

    if not rental.has_refund_account:
        messages.warning(request, f"ลูกค้ายังไม่ได้กรอกบัญชีรับเงินคืน ({rental.booking_ref})")
        return redirect('shop_refunds')

    try:
        services.settle_refund(rental.id)
    except RentalError as e:
        messages.error(request, error_message(e))
    else:
        messages.success(request, f"บันทึกการคืนเงิน {rental.total_amount:,.2f} บาท ({rental.booking_ref}) เรียบร้อย")
    return redirect('shop_refunds')


# ==========================
# จัดการรถ / ข้อมูลร้าน
# ==========================

@shop_required
def add_car(request):
    if request.method == 'POST':
        form = CarForm(request.POST)
        if form.is_valid():
            car = form.save(commit=False)
            car.shop = request.shop
            car.save()
            logger.info("shop %s added car %s", request.shop.pk, car.pk)
            messages.success(request, f"เพิ่มรถ {car.brand} {car.model} เรียบร้อยแล้ว")
            return redirect('shop_inbox')
    else:
        form = CarForm()
    return render(request, 'shop/car_form.html', {'form': form})


@shop_required
def shop_profile(request):
    if request.method == 'POST':
        form = ShopProfileForm(request.POST, instance=request.shop)
        if form.is_valid():
            form.save()
            messages.success(request, "บันทึกข้อมูลร้านเรียบร้อยแล้ว")
            return redirect('shop_profile')
    else:
        form = ShopProfileForm(instance=request.shop)
    return render(request, 'shop/profile.html', {'form': form, 'shop': request.shop})

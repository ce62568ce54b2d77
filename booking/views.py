# booking/views.py
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from rentals import eligibility, pricing, services
from rentals.exceptions import RentalError
from rentals.models import Car, Rental
from rentals.presentation import BOOKING_TAB_LABELS, error_message, filter_by_tab, tab_counts
from rentals.statuses import Action, Actor, CarStatus

from .forms import BookingForm, RefundForm, ReviewForm


# ==========================
# 1. ดูรถ / จองรถ
# ==========================

def car_list(request):
    car_type = request.GET.get('car_type', '')
    keyword = request.GET.get('q', '').strip()

    cars = Car.objects.exclude(status=CarStatus.MAINTENANCE).select_related('shop')
    if car_type:
        cars = cars.filter(car_type=car_type)
    if keyword:
        cars = cars.filter(Q(brand__icontains=keyword) | Q(model__icontains=keyword))

    context = {
        'cars': cars,
        'search_category': car_type,
        'keyword': keyword,
        'car_types': Car.CAR_TYPE_CHOICES,
    }
    return render(request, 'booking/car_list.html', context)


def car_detail(request, car_id):
    car = get_object_or_404(Car.objects.select_related('shop'), id=car_id)
    today = timezone.localdate()
    reviews = car.reviews.select_related('user').order_by('-created_at')

    if request.method == 'POST':
        if not request.user.is_authenticated:
            messages.error(request, "กรุณาเข้าสู่ระบบก่อนจองรถ")
            return redirect('login')

        form = BookingForm(request.POST, car=car, today=today)
        if form.is_valid():
            data = form.cleaned_data
            try:
                rental = services.create_rental(
                    customer=request.user,
                    car=car,
                    start_date=data['start_date'],
                    end_date=data['end_date'],
                    pickup_location=data['pickup_location'],
                    return_location=data['return_location'],
                    today=today,
                )
            except RentalError as e:
                form.add_error(None, error_message(e))
            else:
                messages.success(request, f"ส่งคำขอจองเรียบร้อย! เลขที่การจอง {rental.booking_ref}")
                return redirect('booking_detail', rental_id=rental.id)
    else:
        # คำนวณราคาให้ดูทันทีถ้ามีวันที่มาใน query string
        form = BookingForm(request.GET or None, car=car, today=today)
        if request.GET:
            form.is_valid()

    return render(request, 'booking/car_detail.html', {
        'car': car,
        'form': form,
        'quote': form.quote,
        'reviews': reviews,
    })


# ==========================
# 2. การจองของฉัน
# ==========================

@login_required
def booking_history(request):
    tab = request.GET.get('tab', 'all')
    now = timezone.now()

    rentals = list(
        Rental.objects.filter(customer=request.user).select_related('car', 'shop').order_by('-created_at')
    )
    # แนบสิทธิ์ (ยกเลิก/คืนรถ/รีวิว) ให้แต่ละรายการ
    for rental in rentals:
        rental.caps = eligibility.capabilities(rental, now)

    return render(request, 'booking/booking_history.html', {
        'rentals': filter_by_tab(rentals, tab),
        'tab': tab,
        'tab_labels': BOOKING_TAB_LABELS,
        'tab_counts': tab_counts(rentals),
    })


@login_required
def booking_detail(request, rental_id):
    rental = get_object_or_404(Rental.objects.select_related('car', 'shop'), id=rental_id, customer=request.user)
    now = timezone.now()

    return render(request, 'booking/booking_detail.html', {
        'rental': rental,
        'caps': eligibility.capabilities(rental, now),
        'free_cancel_hours': eligibility.free_cancel_hours(),
        'payments': rental.payments.all(),
        'review_form': ReviewForm(),
        'refund_form': RefundForm(instance=rental),
        'days': pricing.compute_days(rental.start_date, rental.end_date),
    })


def _customer_action(request, rental_id, action, success_message):
    rental = get_object_or_404(Rental, id=rental_id, customer=request.user)
    try:
        services.perform_action(rental.id, action, Actor.CUSTOMER)
    except RentalError as e:
        messages.error(request, error_message(e))
    else:
        messages.success(request, success_message)
    return redirect('booking_detail', rental_id=rental.id)


@login_required
@require_POST
def cancel_booking(request, rental_id):
    return _customer_action(request, rental_id, Action.CANCEL, "ยกเลิกการจองเรียบร้อยแล้ว")


@login_required
@require_POST
def request_return(request, rental_id):
    return _customer_action(request, rental_id, Action.REQUEST_RETURN, "ส่งคำขอคืนรถแล้ว รอร้านอนุมัติ")


# ==========================
# 3. รีวิว / บัญชีรับเงินคืน
# ==========================

@login_required
@require_POST
def submit_review(request, rental_id):
    rental = get_object_or_404(Rental, id=rental_id, customer=request.user)

    form = ReviewForm(request.POST)
    if not form.is_valid():
        messages.error(request, "กรุณาให้คะแนน 1-5 ดาว")
        return redirect('booking_detail', rental_id=rental.id)

    try:
        services.submit_review(rental, request.user, form.cleaned_data['stars'], form.cleaned_data['comment'])
    except RentalError as e:
        messages.warning(request, error_message(e))
    else:
        messages.success(request, "รีวิวรถเรียบร้อยแล้ว!")
    return redirect('booking_detail', rental_id=rental.id)


@login_required
@require_POST
def refund_account(request, rental_id):
    rental = get_object_or_404(Rental, id=rental_id, customer=request.user)

    form = RefundForm(request.POST, instance=rental)
    if not form.is_valid():
        messages.error(request, "กรุณากรอกข้อมูลบัญชีให้ครบถ้วน")
        return redirect('booking_detail', rental_id=rental.id)

    try:
        services.save_refund_account(
            rental,
            form.cleaned_data['refund_bank_name'],
            form.cleaned_data['refund_account_no'],
            form.cleaned_data['refund_account_name'],
        )
    except RentalError as e:
        messages.error(request, error_message(e))
    else:
        messages.success(request, "บันทึกบัญชีรับเงินคืนแล้ว")
    return redirect('booking_detail', rental_id=rental.id)

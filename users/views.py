# users/views.py
from django.contrib import messages
from django.db import transaction
from django.shortcuts import redirect, render

from rentals.models import Shop

from .forms import UserRegisterForm


def register(request):
    if request.method == 'POST':
        form = UserRegisterForm(request.POST)
        if form.is_valid():
            with transaction.atomic():
                user = form.save()
                # สมัครเป็นร้าน -> สร้าง Shop ผูกกับ user เลย
                if form.cleaned_data.get('is_shop'):
                    Shop.objects.create(
                        owner=user,
                        name=form.cleaned_data['shop_name'],
                        phone=user.username,
                        promptpay_id=form.cleaned_data.get('promptpay_id', ''),
                    )

            username = form.cleaned_data.get('username')
            messages.success(request, f'สร้างบัญชีสำหรับ {username} สำเร็จแล้ว!')
            return redirect('login')
    else:
        form = UserRegisterForm()
    return render(request, 'users/register.html', {'form': form})


def custom_login_redirect(request):
    # ร้าน -> กล่องงานของร้าน, ลูกค้า -> การจองของฉัน
    if not request.user.is_authenticated:
        return redirect('login')
    if Shop.objects.filter(owner=request.user).exists():
        return redirect('shop_inbox')
    return redirect('booking_history')

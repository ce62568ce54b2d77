from functools import wraps

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect

from rentals.models import Shop


def shop_required(view_func):
    """Only users that own a shop; the shop is passed as ``request.shop``."""

    @login_required
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            request.shop = request.user.shop
        except Shop.DoesNotExist:
            messages.error(request, "หน้านี้สำหรับร้านเช่ารถเท่านั้น")
            return redirect('car_list')
        return view_func(request, *args, **kwargs)

    return _wrapped

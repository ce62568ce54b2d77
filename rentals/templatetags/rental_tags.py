from django import template

from rentals import presentation

register = template.Library()


@register.filter
def rental_status_label(value):
    return presentation.rental_status_badge(value).label


@register.filter
def rental_status_class(value):
    return presentation.rental_status_badge(value).css_class


@register.filter
def payment_status_label(value):
    return presentation.payment_status_badge(value).label


@register.filter
def payment_status_class(value):
    return presentation.payment_status_badge(value).css_class


@register.filter
def car_status_label(value):
    return presentation.car_status_badge(value).label


@register.filter
def car_status_class(value):
    return presentation.car_status_badge(value).css_class


@register.filter
def stars(value):
    try:
        value = int(value)
    except (TypeError, ValueError):
        value = 0
    value = max(0, min(value, 5))
    return "★" * value + "☆" * (5 - value)

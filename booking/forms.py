# booking/forms.py
from django import forms
from django.utils import timezone

from rentals import pricing
from rentals.models import Rental, Review


class BookingForm(forms.Form):
    start_date = forms.DateField(label='วันที่รับรถ', widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-input'}))
    end_date = forms.DateField(label='วันที่คืนรถ', widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-input'}))
    pickup_location = forms.CharField(label='สถานที่รับรถ', max_length=255, required=False)
    return_location = forms.CharField(label='สถานที่คืนรถ', max_length=255, required=False)

    def __init__(self, *args, car=None, today=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.car = car
        self.today = today or timezone.localdate()
        self.quote = None

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if not start_date or not end_date:
            return cleaned_data

        # ValidationError ของ pricing เป็น subclass ของ Django อยู่แล้ว
        # ปล่อยให้ขึ้นเป็น non-field error ได้เลย
        self.quote = pricing.quote(
            start_date,
            end_date,
            self.car.daily_rate,
            self.car.insurance_rate,
            today=self.today,
        )
        return cleaned_data


class ReviewForm(forms.ModelForm):
    class Meta:
        model = Review
        fields = ['stars', 'comment']
        labels = {
            'stars': 'คะแนน',
            'comment': 'ความคิดเห็น',
        }
        widgets = {
            'stars': forms.NumberInput(attrs={'min': 1, 'max': 5}),
            'comment': forms.Textarea(attrs={'rows': 3, 'placeholder': 'เล่าประสบการณ์การเช่ารถคันนี้'}),
        }


class RefundForm(forms.ModelForm):
    class Meta:
        model = Rental
        fields = ['refund_bank_name', 'refund_account_no', 'refund_account_name']
        labels = {
            'refund_bank_name': 'ธนาคาร',
            'refund_account_no': 'เลขที่บัญชี',
            'refund_account_name': 'ชื่อบัญชี',
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = True

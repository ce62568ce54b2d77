# payments/forms.py
from django import forms


class PaymentProofForm(forms.Form):
    payment_proof = forms.ImageField(
        label='หลักฐานการชำระเงิน',
        error_messages={'required': 'กรุณาเลือกรูปภาพหลักฐานการชำระเงิน'},
        widget=forms.FileInput(attrs={'accept': 'image/*', 'class': 'block w-full text-sm text-gray-500'}),
    )

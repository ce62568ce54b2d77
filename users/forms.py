# users/forms.py
from django import forms
from django.contrib.auth.forms import UserCreationForm
from django.contrib.auth.models import User


# --- ฟอร์มสมัครสมาชิก (ลูกค้า หรือ เปิดร้านเช่ารถ) ---
class UserRegisterForm(UserCreationForm):
    first_name = forms.CharField(label='ชื่อจริง', max_length=100)
    last_name = forms.CharField(label='นามสกุล', max_length=100)
    email = forms.EmailField(label='อีเมล')

    is_shop = forms.BooleanField(label='สมัครเป็นร้านเช่ารถ', required=False)
    shop_name = forms.CharField(label='ชื่อร้าน', max_length=150, required=False)
    promptpay_id = forms.CharField(label='พร้อมเพย์ (เบอร์โทร/เลขบัตรประชาชน)', max_length=20, required=False)

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ['first_name', 'last_name', 'email', 'username']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['username'].label = "เบอร์โทรศัพท์ (ใช้เป็น Username)"

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('is_shop') and not cleaned_data.get('shop_name'):
            self.add_error('shop_name', 'กรุณากรอกชื่อร้าน')
        return cleaned_data

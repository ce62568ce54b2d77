from django import forms

from payments.utils import normalize_target
from rentals.models import Car, Shop


class CarForm(forms.ModelForm):
    class Meta:
        model = Car
        # ไม่ต้องใส่ shop และ status เพราะระบบจะเซ็ตอัตโนมัติใน view
        exclude = ['shop', 'status']
        widgets = {
            'brand': forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'ยี่ห้อรถ'}),
            'model': forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'รุ่นรถ'}),
            'year': forms.NumberInput(attrs={'class': 'form-input', 'placeholder': 'ปีจดทะเบียน'}),
            'license_plate': forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'ทะเบียนรถ'}),
            'car_type': forms.Select(attrs={'class': 'form-select'}),
            'description': forms.Textarea(attrs={'class': 'form-textarea', 'rows': 3, 'placeholder': 'รายละเอียดเพิ่มเติม'}),
            'daily_rate': forms.NumberInput(attrs={'class': 'form-input', 'placeholder': 'ราคาเช่าต่อวัน'}),
            'insurance_rate': forms.NumberInput(attrs={'class': 'form-input', 'placeholder': 'ค่าประกันต่อวัน'}),
        }
        labels = {
            'license_plate': 'ทะเบียนรถ',
            'car_type': 'ประเภทรถ',
            'description': 'รายละเอียด',
            'daily_rate': 'ราคาเช่าต่อวัน (บาท)',
            'insurance_rate': 'ค่าประกันต่อวัน (บาท)',
        }

    def clean_daily_rate(self):
        daily_rate = self.cleaned_data['daily_rate']
        if daily_rate is not None and daily_rate <= 0:
            raise forms.ValidationError('ราคาเช่าต่อวันต้องมากกว่า 0')
        return daily_rate


class ShopProfileForm(forms.ModelForm):
    class Meta:
        model = Shop
        fields = ['name', 'phone', 'promptpay_id']
        labels = {
            'phone': 'เบอร์โทรร้าน',
            'promptpay_id': 'พร้อมเพย์ (เบอร์โทร/เลขบัตรประชาชน)',
        }
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-input'}),
            'phone': forms.TextInput(attrs={'class': 'form-input'}),
            'promptpay_id': forms.TextInput(attrs={'class': 'form-input', 'placeholder': '08x-xxx-xxxx'}),
        }

    def clean_promptpay_id(self):
        promptpay_id = self.cleaned_data['promptpay_id'].strip()
        if promptpay_id:
            try:
                normalize_target(promptpay_id)
            except ValueError:
                raise forms.ValidationError('เลขพร้อมเพย์ไม่ถูกต้อง (เบอร์โทร 10 หลัก หรือเลขบัตรประชาชน 13 หลัก)')
        return promptpay_id

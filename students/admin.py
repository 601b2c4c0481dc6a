from django.contrib import admin

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['admission_number', 'full_name', 'current_class', 'guardian_phone', 'status']
    list_filter = ['status', 'current_class']
    search_fields = ['first_name', 'last_name', 'admission_number', 'guardian_name']

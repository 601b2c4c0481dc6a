from django.contrib import admin

from .models import Class, Subject


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    list_display = ['name', 'level_number', 'section', 'is_active']
    list_filter = ['level_number', 'is_active']
    readonly_fields = ['name']


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'is_core', 'is_active']
    list_filter = ['is_core', 'is_active']
    search_fields = ['name', 'code']

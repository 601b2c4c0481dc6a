from django.contrib import admin

from .models import SchoolSettings


@admin.register(SchoolSettings)
class SchoolSettingsAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'current_term', 'current_year', 'sms_enabled']

    def has_add_permission(self, request):
        # Singleton
        return not SchoolSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False

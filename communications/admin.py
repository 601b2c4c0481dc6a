from django.contrib import admin

from .models import SMSMessage, SMSTemplate


@admin.register(SMSMessage)
class SMSMessageAdmin(admin.ModelAdmin):
    list_display = ['recipient_phone', 'recipient_name', 'message_type', 'status', 'created_at', 'sent_at']
    list_filter = ['status', 'message_type']
    search_fields = ['recipient_phone', 'recipient_name']
    readonly_fields = ['provider_response', 'error_message', 'sent_at', 'created_at']


@admin.register(SMSTemplate)
class SMSTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'message_type', 'is_active']
    list_filter = ['message_type', 'is_active']

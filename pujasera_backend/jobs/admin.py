# jobs/admin.py

from django.contrib import admin

from jobs.models import QueueEntry


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "status", "created_at", "processed_at")
    list_filter = ("type", "status")
    search_fields = ("id", "error")
    readonly_fields = ("id", "type", "payload", "status", "error", "created_at", "processed_at")
    ordering = ("-created_at",)

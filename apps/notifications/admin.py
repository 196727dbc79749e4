from django.contrib import admin

from . import models


@admin.register(models.Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("type", "user", "title", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("title", "content", "user__email")


@admin.register(models.Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("activity_type", "user", "related_id", "created_at")
    list_filter = ("activity_type",)

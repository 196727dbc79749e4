from django.contrib import admin

from .models import Group, GroupMember, Message


class GroupMemberInline(admin.TabularInline):
    model = GroupMember
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ("name", "created_by", "created_at")
    search_fields = ("name", "created_by__username")
    inlines = (GroupMemberInline,)


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("sender", "receiver", "group", "read", "created_at")
    list_filter = ("read",)
    search_fields = ("content", "sender__username")

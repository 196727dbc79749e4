from django.contrib import admin

from .models import ForumPost, ForumComment, Like


class ForumCommentInline(admin.TabularInline):
    model = ForumComment
    fields = ("user", "content", "attachment_url", "created_at")
    readonly_fields = ("created_at",)
    extra = 0


@admin.register(ForumPost)
class ForumPostAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "category", "share_count", "created_at")
    search_fields = ("title", "content", "user__username")
    list_filter = ("category",)
    inlines = (ForumCommentInline,)


admin.site.register(Like)

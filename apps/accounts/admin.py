from django.contrib import admin

from .models import User, Profile


# -------------------------
# Inline helpers
# -------------------------
class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "profile"
    fk_name = "user"
    readonly_fields = ("created_at", "updated_at")


# -------------------------
# User admin
# -------------------------
@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "username", "is_active", "is_staff", "created_at")
    search_fields = ("email", "username")
    readonly_fields = ("created_at", "updated_at", "last_login")
    list_filter = ("is_active", "is_staff")
    inlines = (ProfileInline,)
    ordering = ("-created_at",)

    actions = ["deactivate_users"]

    def deactivate_users(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"Deactivated {updated} users")
    deactivate_users.short_description = "Deactivate selected users"


# -------------------------
# Profile admin
# -------------------------
@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user_email", "full_name", "university", "field_of_study", "created_at")
    search_fields = ("user__email", "user__username", "full_name", "university")
    list_filter = ("university",)
    readonly_fields = ("created_at", "updated_at")

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = "user"

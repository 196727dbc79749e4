from django.contrib import admin

from .models import (
    AcademicProject,
    ProjectCollaborator,
    ProjectDiscussion,
    ProjectInterview,
    ProjectJoinRequest,
    ProjectMilestone,
    ProjectSkill,
    Skill,
)


class ProjectCollaboratorInline(admin.TabularInline):
    model = ProjectCollaborator
    fields = ("user", "role", "status", "joined_at")
    extra = 0


class ProjectMilestoneInline(admin.TabularInline):
    model = ProjectMilestone
    fields = ("title", "due_date", "status")
    extra = 0


@admin.register(AcademicProject)
class AcademicProjectAdmin(admin.ModelAdmin):
    list_display = ("title", "project_type", "status", "creator", "is_verified", "created_at")
    list_filter = ("project_type", "status", "is_verified")
    search_fields = ("title", "creator__username", "university")
    inlines = (ProjectCollaboratorInline, ProjectMilestoneInline)
    actions = ["mark_verified"]

    def mark_verified(self, request, queryset):
        updated = queryset.update(is_verified=True)
        self.message_user(request, f"Verified {updated} projects")
    mark_verified.short_description = "Mark selected projects as verified"


@admin.register(ProjectJoinRequest)
class ProjectJoinRequestAdmin(admin.ModelAdmin):
    list_display = ("project", "user", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("project__title", "user__username")


@admin.register(ProjectInterview)
class ProjectInterviewAdmin(admin.ModelAdmin):
    list_display = ("project", "interviewer", "interviewee", "scheduled_time", "status")
    list_filter = ("status",)


@admin.register(Skill)
class SkillAdmin(admin.ModelAdmin):
    list_display = ("name", "category")
    search_fields = ("name",)


admin.site.register(ProjectSkill)
admin.site.register(ProjectDiscussion)

"""
Admin interface for author profiles and preferences.
"""

from django.contrib import admin

from .models import AuthorProfile, Preference


@admin.register(AuthorProfile)
class AuthorProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'updated_at']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email']
    readonly_fields = ['id', 'nonce', 'created_at', 'updated_at']
    actions = ['rotate_nonces']

    @admin.action(description='Invalidate open editor forms (rotate nonce)')
    def rotate_nonces(self, request, queryset):
        for profile in queryset:
            profile.rotate_nonce()
        self.message_user(request, f"Rotated {queryset.count()} nonce(s).")


@admin.register(Preference)
class PreferenceAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'value', 'updated_at']
    list_filter = ['user']
    search_fields = ['name', 'value']
    readonly_fields = ['id', 'created_at', 'updated_at']

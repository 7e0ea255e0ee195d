"""
Shop admin configuration.

Registers ShopSession so operators can provision or rotate a shop's
access token without the OAuth install flow.
"""

from django import forms
from django.contrib import admin

from shops.exceptions import InvalidShopDomain
from shops.models import ShopSession
from shops.sessions import normalize_shop_domain

__all__ = ["ShopSessionAdmin"]


class ShopSessionAdminForm(forms.ModelForm):
    """Admin form that never renders the stored access token."""

    access_token = forms.CharField(
        widget=forms.PasswordInput(render_value=False),
        help_text="Offline Admin API access token (shpat_...)",
    )

    class Meta:
        model = ShopSession
        fields = ["shop", "access_token", "scope"]

    def clean_shop(self):
        try:
            return normalize_shop_domain(self.cleaned_data["shop"])
        except InvalidShopDomain as e:
            raise forms.ValidationError(e.message) from e


@admin.register(ShopSession)
class ShopSessionAdmin(admin.ModelAdmin):
    """
    Admin configuration for ShopSession.

    The token column shows only the last four characters.
    """

    form = ShopSessionAdminForm
    list_display = ["shop", "masked_token", "scope", "updated_at"]
    search_fields = ["shop"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["shop"]

    @admin.display(description="Access token")
    def masked_token(self, obj: ShopSession) -> str:
        return f"***{obj.access_token[-4:]}" if obj.access_token else ""

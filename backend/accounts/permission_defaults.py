# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "ADMIN": {
        # Master data
        "contacts.view",
        "contacts.manage",
        "products.view",
        "products.manage",
        "analytics.view",
        "analytics.manage",

        # Orders
        "orders.view",
        "orders.create",
        "orders.edit_draft",
        "orders.send",
        "orders.confirm",
        "orders.cancel",

        # Invoices / vendor bills
        "documents.view",
        "documents.generate",
        "documents.post",
        "documents.cancel",

        # Payments
        "payments.view",
        "payments.record",
        "payments.delete",

        # Budgets & reports
        "budgets.view",
        "budgets.manage",
        "reports.view",

        # System
        "sequences.configure",
        "users.invite",
    },
    "INVOICING": {
        "contacts.view",
        "products.view",
        "analytics.view",

        "orders.view",
        "orders.create",
        "orders.edit_draft",
        "orders.send",
        "orders.confirm",
        "orders.cancel",

        "documents.view",
        "documents.generate",
        "documents.post",

        "payments.view",
        "payments.record",

        "budgets.view",
        "reports.view",
    },
    "VENDOR": {
        "portal.view_own",
        "portal.confirm_own",
    },
    "CUSTOMER": {
        "portal.view_own",
        "portal.confirm_own",
    },
}


def all_permission_codes() -> set[str]:
    codes = set()
    for role_codes in ROLE_DEFAULTS.values():
        codes.update(role_codes)
    return codes


def permissions_for_role(role: str) -> frozenset[str]:
    return frozenset(ROLE_DEFAULTS.get(role, set()))

# trading/__init__.py
"""
Trading app - Sales/purchase orders and the invoices/vendor bills derived from them.

Commands handle all mutations; documents are only ever created from a
confirmed order.
"""

"""Employee registry (kana-sorted records in the ``employees`` collection)."""

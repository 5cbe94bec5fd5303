"""CoreShop service libraries."""

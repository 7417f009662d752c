INITIAL = "initial"
AWAITING_MENU_CHOICE = "awaiting_menu_choice"
AWAITING_ORDER_ITEMS = "awaiting_order_items"
AWAITING_ORDER_CONFIRMATION = "awaiting_order_confirmation"
AWAITING_DELIVERY_CHOICE = "awaiting_delivery_choice"
AWAITING_FULL_NAME = "awaiting_full_name"
AWAITING_PHONE = "awaiting_phone"
AWAITING_ADDRESS = "awaiting_address"

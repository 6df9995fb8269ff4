"""Fixed category tables shared by the catalog, purchases and expenses"""

ITEM_CATEGORY_CHOICES = [
    ('finished_product', 'Finished Product'),
    ('raw_material', 'Raw Material'),
    ('sauce_chutney', 'Sauce & Chutney'),
]

ENTITY_STORE = 'store'
ENTITY_PRODUCTION_HOUSE = 'production_house'
ENTITY_GLOBAL = 'global'
ENTITY_TYPE_CHOICES = [
    (ENTITY_STORE, 'Store'),
    (ENTITY_PRODUCTION_HOUSE, 'Production House'),
    (ENTITY_GLOBAL, 'Global'),
]

PURCHASE_CATEGORIES = {
    'fresh_produce': 'Fresh Produce',
    'spices_seasonings': 'Spices & Seasonings',
    'dairy': 'Dairy Products',
    'meat': 'Meat & Protein',
    'packaging': 'Packaging Materials',
    'gas_utilities': 'Gas & Utilities',
    'production': 'Production Ingredients',
    'staff_essentials': 'Staff Essentials',
}

# Suggested item names offered for each purchase category
PURCHASE_CATEGORY_ITEMS = {
    'fresh_produce': [
        'Tomato', 'Capsicum', 'Onion', 'Cabbage', 'Gandhoraj Lemon', 'Lemon', 'Pudina',
        'Coriander Leaves', 'Garlic', 'Green Chilli', 'Ginger', 'Red Chilli', 'Carrot', 'Potato',
    ],
    'spices_seasonings': [
        'Soya Sauce', 'Chilli Sauce', 'Vinegar', 'Oil', 'Salt', 'Sugar', 'Ajinomoto', 'Black Pepper',
        'White Pepper', 'Peri Peri Masala', 'Baking Powder', 'Corn Flour', 'Maida',
    ],
    'dairy': ['Butter', 'Cheese'],
    'meat': ['Chicken'],
    'packaging': ['Butter Paper', 'Carry Bag', 'Container', 'Tissue Paper'],
    'gas_utilities': ['LPG Gas'],
    'production': ['Dough', 'Batter', 'Stuffing'],
    'staff_essentials': ['Labour', 'Cleaning', 'Water', 'Electricity'],
}

OVERHEAD_CATEGORIES = {
    'fuel': 'Fuel Cost',
    'travel': 'Travel Cost',
    'transportation': 'Transportation Cost',
    'marketing': 'Marketing Cost',
    'service_charge': 'Service Charge (Food Aggregators)',
    'repair': 'Repair Cost',
    'party': 'Party Cost',
    'lunch': 'Lunch Cost',
    'personal_expense': 'Personal Expense',
    'miscellaneous': 'Miscellaneous Cost',
}

FIXED_COST_CATEGORIES = {
    'electricity': 'Electricity',
    'rent': 'Rent',
    'lpg_gas': 'LPG Gas',
}

# Finished products created by initialize-defaults
DEFAULT_MOMO_ITEMS = [
    ('chicken', 'Chicken Momo'),
    ('chicken_cheese', 'Chicken Cheese Momo'),
    ('veg', 'Veg Momo'),
    ('cheese_corn', 'Cheese Corn Momo'),
    ('paneer', 'Paneer Momo'),
    ('veg_kurkure', 'Veg Kurkure Momo'),
    ('chicken_kurkure', 'Chicken Kurkure Momo'),
]


def as_choices(mapping):
    return list(mapping.items())

"""Copy for the public front page."""

BRAND = {
    'name': 'Domain Computers',
    'tagline': 'Expert electronics sales, professional repair services, and reliable technical support. '
               'We bring innovation to your doorstep.',
}

HERO_STATS = [
    {'value': '10K+', 'label': 'Devices Repaired'},
    {'value': '99%', 'label': 'Satisfaction Rate'},
    {'value': '24/7', 'label': 'Support Available'},
]

SERVICES = [
    {
        'title': 'Electronics Sales',
        'description': 'Premium laptops, desktops, smartphones, and accessories from top brands at competitive prices.',
    },
    {
        'title': 'Expert Repairs',
        'description': 'Professional repair services for all devices. Screen replacements, battery upgrades, and more.',
    },
    {
        'title': 'Technical Support',
        'description': '24/7 technical assistance for software issues, network setup, and device troubleshooting.',
    },
    {
        'title': 'Data Recovery',
        'description': 'Advanced data recovery solutions for damaged drives, corrupted files, and lost data.',
    },
]

FEATURES = ['Same-Day Service', 'Warranty Guaranteed', 'Genuine Parts']

PRODUCTS = [
    {'name': 'Laptops', 'count': '150+ Models'},
    {'name': 'Smartphones', 'count': '200+ Devices'},
    {'name': 'Desktops', 'count': '80+ Builds'},
    {'name': 'Audio', 'count': '100+ Products'},
    {'name': 'Wearables', 'count': '50+ Options'},
    {'name': 'Accessories', 'count': '300+ Items'},
]

CONTACT_INFO = [
    {'label': 'Address', 'value': '123 Tech Street, Digital City, DC 12345'},
    {'label': 'Phone', 'value': '+1 (555) 123-4567'},
    {'label': 'Email', 'value': 'support@domaincomputers.com'},
    {'label': 'Hours', 'value': 'Mon-Sat: 9AM - 8PM'},
]

NAV_LINKS = [
    {'label': 'Home', 'anchor': 'home'},
    {'label': 'Services', 'anchor': 'services'},
    {'label': 'Products', 'anchor': 'products'},
    {'label': 'Contact', 'anchor': 'contact'},
]


def landing_context() -> dict:
    return {
        'brand': BRAND,
        'stats': HERO_STATS,
        'services': SERVICES,
        'features': FEATURES,
        'products': PRODUCTS,
        'contact_info': CONTACT_INFO,
        'nav_links': NAV_LINKS,
    }

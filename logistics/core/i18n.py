"""
French/English message catalogue.

Keys are dotted paths into the nested dictionaries, e.g.
``translate('en', 'tracking.status.pending')``. A miss returns the key.
"""

SUPPORTED_LANGS = ('fr', 'en')
DEFAULT_LANG = 'fr'

TRANSLATIONS = {
    'fr': {
        'tracking': {
            'errors': {
                'notFound': "Aucune commande trouvée avec ce numéro de suivi",
                'generic': "Erreur lors de la recherche",
                'missingQuery': "Paramètre tracking ou email requis",
            },
            'status': {
                'pending': "En attente",
                'confirmed': "Confirmée",
                'in_progress': "En cours",
                'completed': "Terminée",
                'cancelled': "Annulée",
            },
            'containerStatus': {
                'planned': "Planifié",
                'departed': "Départ confirmé",
                'in_transit': "En transit",
                'arrived': "Arrivé",
                'delivered': "Livré",
                'delayed': "Retard",
            },
            'packageStatus': {
                'preparation': "En préparation",
                'expedie': "Expédié",
                'en_transit': "En transit",
                'arrive_port': "Arrivé au port",
                'dedouane': "Dédouané",
                'livre': "Livré",
            },
        },
        'notifications': {
            'subject': "Bonne nouvelle ! Votre colis avance 🚚",
            'defaultReference': "votre envoi",
            'defaultName': "client",
            'sms': "Danemo: Bonjour {name}, votre commande {reference} est maintenant {stage}. Suivi: {link}",
            'containerStage': {
                'planned': "en préparation",
                'departed': "en cours de livraison",
                'in_transit': "en cours de livraison",
                'arrived': "arrivée dans votre région",
                'delivered': "entre les mains du transporteur",
                'delayed': "en cours de livraison (avec un léger retard)",
            },
            'orderStage': {
                'pending': "en préparation",
                'confirmed': "en préparation",
                'in_progress': "en cours de livraison",
                'completed': "livrée",
                'cancelled': "annulée",
                'default': "en cours de livraison",
            },
        },
        'errors': {
            'notFound': "Ressource introuvable",
            'required': "Champs requis manquants",
            'invalidEmail': "Format d'email invalide",
            'invalidPhone': "Format de téléphone invalide",
            'server': "Erreur interne du serveur",
        },
    },
    'en': {
        'tracking': {
            'errors': {
                'notFound': "No order found with this tracking number",
                'generic': "Error during search",
                'missingQuery': "Tracking or email parameter required",
            },
            'status': {
                'pending': "Pending",
                'confirmed': "Confirmed",
                'in_progress': "In Progress",
                'completed': "Completed",
                'cancelled': "Cancelled",
            },
            'containerStatus': {
                'planned': "Planned",
                'departed': "Departure Confirmed",
                'in_transit': "In Transit",
                'arrived': "Arrived",
                'delivered': "Delivered",
                'delayed': "Delayed",
            },
            'packageStatus': {
                'preparation': "In preparation",
                'expedie': "Shipped",
                'en_transit': "In transit",
                'arrive_port': "Arrived at port",
                'dedouane': "Cleared customs",
                'livre': "Delivered",
            },
        },
        'notifications': {
            'subject': "Good news! Your parcel is on its way 🚚",
            'defaultReference': "your shipment",
            'defaultName': "customer",
            'sms': "Danemo: Hello {name}, your order {reference} is now {stage}. Tracking: {link}",
            'containerStage': {
                'planned': "being prepared",
                'departed': "on its way",
                'in_transit': "on its way",
                'arrived': "arrived in your region",
                'delivered': "with the carrier",
                'delayed': "on its way (slightly delayed)",
            },
            'orderStage': {
                'pending': "being prepared",
                'confirmed': "being prepared",
                'in_progress': "on its way",
                'completed': "delivered",
                'cancelled': "cancelled",
                'default': "on its way",
            },
        },
        'errors': {
            'notFound': "Resource not found",
            'required': "Missing required fields",
            'invalidEmail': "Invalid email format",
            'invalidPhone': "Invalid phone format",
            'server': "Internal server error",
        },
    },
}


def _resolve(source, segments):
    for segment in segments:
        if not isinstance(source, dict) or segment not in source:
            return None
        source = source[segment]
    return source if isinstance(source, str) else None


def translate(lang, key):
    if lang not in TRANSLATIONS:
        lang = DEFAULT_LANG
    segments = [s for s in key.split('.') if s]
    resolved = _resolve(TRANSLATIONS[lang], segments)
    return resolved if resolved is not None else key


def resolve_language(request):
    """Pick the language from ?lang=, then Accept-Language, else French."""
    if request is None:
        return DEFAULT_LANG
    params = getattr(request, 'query_params', None) or getattr(request, 'GET', {})
    lang = (params.get('lang') or '').strip().lower()
    if lang in SUPPORTED_LANGS:
        return lang
    header = request.META.get('HTTP_ACCEPT_LANGUAGE', '') if hasattr(request, 'META') else ''
    for part in header.split(','):
        code = part.split(';')[0].strip().lower()[:2]
        if code in SUPPORTED_LANGS:
            return code
    return DEFAULT_LANG

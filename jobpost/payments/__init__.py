"""
Module 'payments' (feature-first): tarification, commande Stripe,
vérification de paiement et contrôleur de handshake côté client.
"""

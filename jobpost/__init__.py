"""
jobpost: publication d'offres d'emploi par lot avec paiement vérifié.
"""

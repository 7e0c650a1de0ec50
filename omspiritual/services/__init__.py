"""
OM Spiritual Backend - Services Layer
======================================

What:  Business rules between the routes (HTTP) and the models (persistence).
How:   Each service is a stateless class with a module-level singleton. Calls
       take the request's AsyncSession as their first argument and raise
       omspiritual.exceptions types; main.py maps those to status codes.

Service Inventory:
    - security:               token issue/verify, password hashing
    - AuthService:            signup, login, profile
    - ChantService:           catalog listing and creation
    - MoodService:            append-only mood journal
    - LLMService (abstract):  recommendation provider interface
    - GeminiService:          LLMService on Google Gemini
    - RecommendationService:  onboarding / LLM / fallback policy
    - BillingService:         Razorpay subscriptions and webhook intake
    - AdminService:           stats and the disabled flag
"""

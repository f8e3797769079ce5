import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login as django_login, logout
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from services.exceptions import ConflictError

logger = logging.getLogger(__name__)


@require_http_methods(["GET", "POST"])
def login_view(request):
    """Login page"""
    if request.user.is_authenticated:
        return redirect('dashboard')

    if request.method == 'POST':
        username = (request.POST.get('username') or '').strip()
        password = request.POST.get('password') or ''

        if not username or not password:
            messages.error(request, 'Please enter both username and password.')
            return render(request, 'auth/login.html', {'username': username})

        user = authenticate(request, username=username, password=password)

        if user:
            # Rotates the session key
            django_login(request, user)
            messages.success(request, f'Welcome back, {user.display_name}!')
            return redirect('dashboard')

        logger.info("Failed login for %s", username)
        messages.error(request, 'Invalid username or password')
        return render(request, 'auth/login.html', {'username': username})

    return render(request, 'auth/login.html')


@require_POST
def logout_view(request):
    """Logout"""
    logout(request)
    messages.success(request, 'You have been logged out successfully')
    return redirect('login')


def csrf_failure(request, reason=""):
    """Rejected form submission (CSRF token missing or stale)"""
    logger.warning("CSRF failure on %s: %s", request.path, reason)
    messages.error(request, ConflictError().message)
    return render(request, 'auth/login.html', status=403)

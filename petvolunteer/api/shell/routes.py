# petvolunteer/api/shell/routes.py
from flask import Blueprint, jsonify

shell_bp = Blueprint('shell_bp', __name__)

SPLASH_DELAY_MS = 2500

# 화면 이름 -> 경로. 클라이언트 라우터와 같은 값을 사용합니다.
ROUTE_TABLE = {
    "splash": "/",
    "login": "/login",
    "signup": "/signup",
    "home": "/home",
    "restaurants": "/restaurants",
    "attendance": "/attendance",
    "community": "/community",
    "volunteer_detail": "/volunteer/<id>",
    "volunteer_write": "/volunteer/write",
    "volunteer_edit": "/volunteer/edit/<id>",
    "restaurant_write": "/restaurant/write",
    "post_write": "/post/write",
    "mypage": "/mypage",
}


@shell_bp.route('/', methods=['GET'])
def index():
    """스플래시 화면. 앱 이름과 화면 경로 표를 반환합니다."""
    return jsonify({
        "app": "petpi",
        "tagline": "유기동물과 함께하는 따뜻한 세상",
        "routes": ROUTE_TABLE,
        "next": ROUTE_TABLE["home"],
        "redirect_after_ms": SPLASH_DELAY_MS,
    }), 200

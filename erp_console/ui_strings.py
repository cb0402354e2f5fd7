from __future__ import annotations

from typing import Dict, List


FRIENDLY_TERMS: Dict[str, str] = {
    "app_name": "ERP 시스템",
    "purchase_order": "구매주문",
    "supplier": "공급업체",
    "dashboard": "대시보드",
    "work_order": "작업지시",
}


STATUS_GROUPS: Dict[str, List[Dict[str, str]]] = {
    "purchase_order": [
        {
            "key": "PENDING",
            "label": "승인대기",
            "description": "주문이 작성되었거나 공급업체에 전달되어 승인을 기다리는 중입니다.",
        },
        {
            "key": "APPROVED",
            "label": "승인완료",
            "description": "공급업체가 주문을 확인했습니다.",
        },
        {
            "key": "RECEIVED",
            "label": "입고완료",
            "description": "주문 품목의 일부 또는 전체가 입고되었습니다.",
        },
        {
            "key": "COMPLETED",
            "label": "완료",
            "description": "주문 처리가 모두 끝났습니다.",
        },
    ],
    "role": [
        {
            "key": "ADMIN",
            "label": "관리자",
            "description": "모든 메뉴와 사용자 관리 권한을 가집니다.",
        },
        {
            "key": "MANAGER",
            "label": "매니저",
            "description": "부서 업무와 승인 권한을 가집니다.",
        },
        {
            "key": "USER",
            "label": "사용자",
            "description": "일반 조회 및 등록 권한을 가집니다.",
        },
    ],
}


MESSAGES: Dict[str, Dict[str, str]] = {
    "success": {
        "login": "로그인되었습니다.",
        "logout": "로그아웃되었습니다.",
        "register": "회원가입이 완료되었습니다.",
        "profile_updated": "프로필이 수정되었습니다.",
        "password_changed": "비밀번호가 변경되었습니다.",
        "order_created": "구매주문이 생성되었습니다.",
        "order_updated": "구매주문이 수정되었습니다.",
        "order_deleted": "구매주문이 삭제되었습니다.",
    },
    "error": {
        "action_invalid": "잘못된 요청입니다.",
        "validation_error": "필수 필드를 모두 입력해주세요.",
        "auth_required": "로그인이 필요합니다.",
        "auth_failed": "이메일 또는 비밀번호가 올바르지 않습니다.",
        "permission_denied": "접근 권한이 없습니다.",
        "network_error": "Network error occurred",
        "api_unavailable": "서버와 통신할 수 없습니다. 잠시 후 다시 시도해주세요.",
        "order_create_failed": "구매주문 생성에 실패했습니다.",
        "order_list_failed": "구매주문 목록을 가져오는데 실패했습니다.",
        "order_not_found": "구매주문을 찾을 수 없습니다.",
        "order_update_failed": "구매주문 수정에 실패했습니다.",
        "order_delete_failed": "구매주문 삭제에 실패했습니다.",
        "dashboard_stats_failed": "대시보드 통계를 불러오는데 실패했습니다.",
        "dashboard_recent_orders_failed": "최근 구매 주문을 불러오는데 실패했습니다.",
        "dashboard_work_orders_failed": "작업지시 현황을 불러오는데 실패했습니다.",
        "unexpected_error": "요청을 처리하는 중 오류가 발생했습니다.",
    },
    "operator": {
        "api_connection_failed": "API 서버에 연결할 수 없습니다: {reason}",
        "insecure_secret_key": "운영 환경에서는 기본 SECRET_KEY를 사용할 수 없습니다.",
        "invalid_storage_backend": "지원하지 않는 SESSION_STORAGE_BACKEND입니다: {backend}",
        "storage_dir_missing": "SESSION_STORAGE_BACKEND=file 설정에는 SESSION_STORAGE_DIR가 필요합니다.",
        "context_missing": "ConsoleContext가 등록되지 않았습니다. create_app()을 사용하세요.",
        "invalid_status_filter": "지원하지 않는 구매주문 상태입니다: {status}",
        "cli_session_help": "저장된 운영자 세션을 관리합니다.",
        "cli_login_failed": "로그인에 실패했습니다.",
        "cli_login_success": "{email} ({role}) 계정으로 로그인되었습니다.",
        "cli_logout_success": "로그아웃되었습니다. 이동 경로: {target}",
        "cli_no_session": "활성 세션이 없습니다.",
        "cli_session_unverified": "서버에서 세션을 확인할 수 없습니다.",
    },
}


def status_label(group: str, key: str | None, default: str | None = None) -> str:
    for item in STATUS_GROUPS.get(group, []):
        if item["key"] == key:
            return item["label"]
    if default is not None:
        return default
    return str(key or "")


def get_message(category: str, key: str, default: str | None = None) -> str:
    message = MESSAGES.get(category, {}).get(key)
    if message:
        return message
    if default is not None:
        return default
    return key


def error_message(key: str, default: str | None = None) -> str:
    return get_message("error", key, default)


def success_message(key: str, default: str | None = None) -> str:
    return get_message("success", key, default)


def operator_message(key: str, **params: object) -> str:
    message = get_message("operator", key)
    return message.format(**params) if params else message


def frontend_bundle() -> Dict[str, object]:
    return {
        "terms": FRIENDLY_TERMS,
        "status_groups": STATUS_GROUPS,
        "messages": {category: MESSAGES[category] for category in ("success", "error")},
    }

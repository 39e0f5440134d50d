"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- transactions: 거래 생성/조회/수정/삭제
- balance: 잔고 조회 및 개인 ↔ 가족 이체
- household: 가구 구성원
- invitations: 가구 초대
- integrity: 잔고 정합성 이슈/복구
- ws: 푸시 채널 (WebSocket)
"""

"""서비스 패키지: 스케줄 생성 및 급여 집계 로직 계층.

Service package: Scheduling and pay aggregation logic layer.
Every service is a stateless module-level singleton over immutable schema
values; none performs I/O.
"""

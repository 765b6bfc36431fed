"""
User Directory Service - 应用主包

子模块：
- api/        : API 路由和依赖注入
- auth/       : 密码哈希与校验
- db/         : 数据库连接和会话管理
- models/     : SQLAlchemy ORM 数据模型
- schemas/    : Pydantic 请求/响应模式
- services/   : 业务逻辑（用户目录、授权视图、登录、种子数据、国家列表）
- infra/      : 基础设施（日志、缓存）
- middleware/ : 请求追踪

分层设计：
    API层 → 服务层 → 数据访问层 → 基础设施层
"""

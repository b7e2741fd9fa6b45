"""
表单排版引擎 - 后端核心模块

模块结构：
- config/     运行期配置、日志与表单 YAML 加载
- models/     数据模型定义（表单 schema / 样式表 / 排版结果 / 任务）
- schema/     规范化与校验
- styles/     样式令牌与样式表解析
- layout/     排版引擎（游标与分页 / 内容驱动 / 字段策略）
- features/   计算字段、条件显示、字段值校验
- render/     PDF 渲染与排版结果导出
- pipeline/   流水线编排与任务管理
- cli         命令行入口
"""

__version__ = "0.1.0"

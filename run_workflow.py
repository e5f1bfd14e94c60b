"""Minimal runner for testing a workflow's worker call.

Usage:
  python run_workflow.py --workflow-id <id>
  python run_workflow.py --worker-id <id> --token <token> --var request=hello [--workflow-id <id>]

Stored workflows are loaded from Supabase; pass --memory to run ad hoc calls
against an in-memory audit store instead.
"""
import argparse
import json
import logging
import sys

from invoker import factory
from invoker.invocation import CallDescriptor, DEFAULT_CALL, InvocationError, InvocationRequest
from invoker.notify import LoggingNotifier
from invoker.workflows import WorkflowNotFoundError, run_stored_workflow


def _parse_vars(pairs):
	out = {}
	for pair in pairs or []:
		if '=' not in pair:
			raise SystemExit(f"--var expects name=value, got {pair!r}")
		k, v = pair.split('=', 1)
		out[k.strip()] = v
	return out


def build_parser():
	parser = argparse.ArgumentParser(description='Invoke a workflow worker once and record the outcome')
	parser.add_argument('--workflow-id', help='Stored workflow id (loaded unless --worker-id is given)')
	parser.add_argument('--worker-id', help='Worker id for an ad hoc call')
	parser.add_argument('--token', help='Worker API auth token (with or without "Bearer ")')
	parser.add_argument('--var', action='append', help='Variable as name=value; repeatable')
	parser.add_argument('--url', default=DEFAULT_CALL.url, help='Worker endpoint URL')
	parser.add_argument('--method', default=DEFAULT_CALL.method, help='HTTP method')
	parser.add_argument('--memory', action='store_true', help='Use the in-memory store instead of Supabase')
	parser.add_argument('--lock', choices=['none', 'local', 'redis'], default='none', help='Per-workflow lock backend')
	parser.add_argument('--json', action='store_true', help='Emit the raw result JSON')
	return parser


def main(argv=None):
	args = build_parser().parse_args(argv)
	logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s %(message)s')

	service = factory.build_service('memory' if args.memory else 'supabase')
	notifier = LoggingNotifier()
	pipeline = factory.create_pipeline(service, notifier=notifier, lock=factory.build_lock(args.lock))

	try:
		if args.worker_id:
			request = InvocationRequest(
				worker_id=args.worker_id,
				auth_token=args.token or '',
				call=CallDescriptor(method=args.method, url=args.url, content_type=DEFAULT_CALL.content_type),
				variables=_parse_vars(args.var),
				workflow_id=args.workflow_id,
			)
			result = pipeline.invoke(request)
		elif args.workflow_id:
			result = run_stored_workflow(pipeline, factory.create_repository(service), args.workflow_id, notifier)
		else:
			build_parser().error('either --workflow-id or --worker-id is required')
	except InvocationError as exc:
		if args.json:
			print(json.dumps({'success': False, 'error': exc.to_dict()}, default=str, indent=2))
		else:
			print(f"failed: {exc.message}", file=sys.stderr)
		return 1
	except WorkflowNotFoundError as exc:
		print(f"failed: {exc}", file=sys.stderr)
		return 2

	if args.json:
		print(json.dumps(result.to_dict(), default=str, ensure_ascii=False, indent=2))
	else:
		print(result.response)
	return 0


if __name__ == '__main__':
	sys.exit(main())
